"""
Identity service.

Registers users, authenticates them by username and password, and issues
signed access tokens (see :mod:`pictureit.auth.tokens`) carrying the user's
id, profile and permission mask. Other services verify these tokens with
the public key alone, so they never need to call back here.
"""
