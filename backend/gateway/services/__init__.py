# Services package init
"""
Corpdata Gateway - Services Layer
==================================

What:  The database access sequence shared by every route handler.

Service Inventory:
    - QueryService: acquire → query → release-or-close, plus the read,
      search and write result shapes built on top of it
"""
