"""Mapping between single HAProxy configuration lines and model objects."""