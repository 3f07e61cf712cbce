"""Server-rendered Monji Web UI.

Every route follows the same shape:
- read the bearer token from the HttpOnly `token` cookie (or redirect to /login)
- call the Monji API with it
- render a Jinja2 page, or answer a form post with a 303 redirect

Nothing is cached or persisted here; the API owns all state.
"""
