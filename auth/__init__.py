"""
Admin auth for Vote Platform.

HTTP Basic credentials guarding the administrative routes only. Voting
itself is anonymous; nothing here applies to it.
"""
