"""
Services.

Business rules over the repositories. Each service is constructed per
request with the request's database session.
"""
