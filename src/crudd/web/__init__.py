"""HTTP front end for crudd.

An index page listing the catalog, one streamed page per command, and
static assets, all behind an access log middleware.
"""
