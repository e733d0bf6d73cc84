"""
cluster-dao - Data access layer for clustered MySQL.

Routes statements to master or slave node groups, assembles SQL from
structural fragments and normalizes result rows into application records.
"""

__version__ = "0.1.0"
