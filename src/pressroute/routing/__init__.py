"""Routing: routes, path templates, handler resolution, and the route manager.

Routes are declared during setup, stay pending until registered, and are
owned by the manager of the router that created them.
"""
