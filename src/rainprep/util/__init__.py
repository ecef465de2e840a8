"""
rainprep/util
~~~~~~~~~~~~~
"""
