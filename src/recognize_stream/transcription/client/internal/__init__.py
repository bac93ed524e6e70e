"""Internal building blocks of the recognize client.

Modules here are imported directly; nothing is re-exported so that
``types`` can depend on ``params`` without pulling in the socket.
"""
