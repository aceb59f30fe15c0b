"""
Route engine services.

Submodules are imported directly (route_engine.services.engine,
route_engine.services.solver, ...) so that importing one concern does not
pull in the solver stack or the database layer.
"""
