"""Identity Assignment Module.

This module provides the bulk card-number assignment workflow:
- Load a CSV file mapping logins to card TIDs
- Validate every row (card id format, then login format)
- Assign each valid row's TID to login@domain through the tenant API
- Report per-row results and a summary

Architecture: Clean Architecture with Hexagonal (Ports & Adapters)
"""
