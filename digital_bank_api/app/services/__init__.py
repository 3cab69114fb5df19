"""
Service layer abstraction.

Each service encapsulates the business rules for a domain and talks to
the document store; API handlers only translate HTTP to service calls.
Services never call each other, except that authentication asks the
user service to verify credentials.
"""
