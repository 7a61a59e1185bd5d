"""
Media library bindings.

Each module here adapts one concrete media library to the abstract
`MediaReference` interface of the domain layer.

Modules:
    filesystem.py: Treats a local directory as a media library.
"""
