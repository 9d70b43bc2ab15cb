"""Personal Finance Tracker package.

Record expenses, set monthly category budgets and follow spending trends.
See ``app.py`` for the Streamlit UI and ``api_server.py`` for the REST API.
"""
