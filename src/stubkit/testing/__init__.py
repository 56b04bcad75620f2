"""
Test tooling for stubkit users.

``stubkit.testing.fixtures`` is a pytest plugin, registered through the
``pytest11`` entry point, providing the ``sandbox`` and ``stub_policy``
fixtures.
"""
