"""
Core modules of the agent explorer filter-testing toolkit.
"""
