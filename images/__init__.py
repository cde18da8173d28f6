"""
Image service.

Keeps a record of each uploaded image, and the image itself in a remote image
store. Every route requires an access token issued by the identity service;
changes to an image are restricted to its owner.
"""
