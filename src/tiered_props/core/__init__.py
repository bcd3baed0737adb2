# src/tiered_props/core/__init__.py
"""
Core do tiered-props.

Componentes:
    - store → ConfigStore e suas peças (paths, codec, chain, types, errors)

O core não depende de UI nem de frameworks externos além de PyYAML e
platformdirs.
"""
