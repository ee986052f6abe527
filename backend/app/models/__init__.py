# Models package init
"""
Postboard Backend — Document Models
======================================

Model Inventory:
    - post.py:  Post document view, parse_post_id, PostStore collection accessor
"""
