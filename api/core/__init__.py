"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks more than one feature uses: the database
pool and the object-storage backends. Feature-specific SQL and business logic
stay in the feature package (e.g. `submissions/`).
"""
