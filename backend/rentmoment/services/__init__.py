# Services package init
"""
Rent The Moment Backend — Services Layer
=======================================

What:  Business logic between routes (HTTP) and models (persistence).
How:   Stateless singletons; every call receives the request's AsyncSession.

Service Inventory:
    - ListingService: filter → count → sort → paginate, shared by every list endpoint
    - SqlAlchemyCollection: the storage collaborator ListingService reads through
    - MerchantService, CategoryService, ProductService, OrderService, UserService:
      entity CRUD plus a listing profile each
    - AuthService: register / login
    - FileService: image upload validation, storage, serving and deletion
"""
