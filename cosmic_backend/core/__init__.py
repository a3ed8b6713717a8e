"""
Core cross-cutting pieces: the exception hierarchy shared by the store,
the on-chain collaborator and the API server.
"""
