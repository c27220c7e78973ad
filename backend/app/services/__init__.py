"""
Ulyngo Backend — Services Layer
=================================

What:  Business logic between the routes (HTTP) and the database / external APIs.
How:   Database services are stateless singletons that receive the request's
       AsyncSession per call. The external-API clients and the TripPlanner
       hold a shared httpx client and are built once in the app lifespan.

Service Inventory:
    - IntentExtractor (abstract) / VertexIntentExtractor: trip intent via Gemini
    - DirectionsClient, PlacesClient: Google Maps web services
    - TripPlanner: extract → route → stops → return-trip shop
    - AuthService, security: registration, login, bcrypt, JWT
    - MarkerService, TaxonomyService: marker catalog
    - RouteService: saved routes
    - record_activity: user_activity_logs writer
"""
