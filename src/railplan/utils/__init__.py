"""
Utility helpers for the delivery planner.

• Command-line argument parsing and parameter overrides (`cli.py`).
• Saving plans to Excel or JSON (`save_results.py`).
• Logging colour codes and progress bars (`logging.py`).
"""
