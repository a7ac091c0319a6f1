"""
Client-side storefront state: the cart store, the theme preference and the
HTTP client they use to talk to the store API.
"""
