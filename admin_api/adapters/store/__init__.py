"""Document store adapters.

Routes talk to ``AbstractDocumentStore``; the in-memory implementation backs
development and tests, a database driver can implement the same interface.
"""
