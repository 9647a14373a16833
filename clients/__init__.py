"""
HTTP clients for the backend collaborators.

- ebay: transaction source (eBay Finances API via the backend)
- freeagent: bank accounts and statement upload
- autosync: auto-sync settings stored by the backend scheduler
"""
