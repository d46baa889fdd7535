# Services package init
"""
CarVault Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Separation of concerns — routes handle HTTP, services handle business rules.
How:   Services receive the session and the caller's identity as arguments,
       apply business rules, and return response schemas or ORM objects.

Service Inventory:
    - CarService:   Car record lifecycle, keyword search, image merge on update
    - ImageService: Image count/size limits and base64 transport encoding
    - UserService:  Registration, login credential checks, user lookup
"""
