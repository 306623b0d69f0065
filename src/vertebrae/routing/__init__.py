"""Routing: fragment patterns compiled into a trie, plus the hash history.

Routes are registered by the app during setup and compiled into an
immutable lookup structure when the history starts.
"""
