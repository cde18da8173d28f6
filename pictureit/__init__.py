"""
Shared components for the picture-it identity and image services.

The identity service authenticates users and issues signed access tokens
(see :mod:`pictureit.auth.tokens`). The image service verifies those tokens
with the public half of the same key pair, enforces permissions and
ownership (see :mod:`pictureit.auth.gate`), and keeps its image records in
sync with the remote image store.
"""
