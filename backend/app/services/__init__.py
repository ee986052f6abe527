# Services package init
"""
Postboard Backend — Services Layer
=====================================

Service Inventory:
    - UploadReceiver: stores uploaded images, removes them on delete
    - PostService:    post rules; coordinates PostStore and UploadReceiver

Services receive their collaborators through the constructor, so tests
can hand them an in-memory collection and a temporary upload directory.
"""
