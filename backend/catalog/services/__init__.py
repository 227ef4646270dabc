"""
Catalog Backend: Services Layer
================================

What:  Business logic between the routes (HTTP) and the database.
How:   Stateless singletons; every call receives the request's AsyncSession.

Service Inventory:
    - MediaService:      image validation, Cloudinary upload, orphan cleanup
    - CategoryService:   category upsert workflow and delete guard
    - ProductService:    product upsert workflow with five image slots
    - ReferenceService:  subcategories, brands, variant types, variants and
                         the shared delete guard
"""
