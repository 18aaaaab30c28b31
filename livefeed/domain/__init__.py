"""Domain layer: events, value objects and protocols (ports).

No framework or Redis imports live here.
"""
