# Schemas package init
"""
Postboard Backend — API Schemas
==================================

Schema Inventory:
    - post.py:  PostResponse, MessageResponse, ErrorResponse, HealthResponse
"""
