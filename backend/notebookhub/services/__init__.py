"""
NotebookHub Backend — Services Layer
=====================================

What:  Business rules between the routes (HTTP) and the database.
How:   Services take plain values and an AsyncSession, return ORM objects
       or response models, and raise NotebookHubError subclasses.

Service Inventory:
    - FileService:      upload validation, storage under dated folders, cleanup
    - DocumentService:  listing, moderation, edit, delete, view/download counters
    - AuthService:      admin login and bearer token verification
"""
