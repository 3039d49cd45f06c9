"""
The FIELDS layer holds the per-cell tensor algebra, the finite-volume operators
(grad, div, lap, convection) and the sparse operator container they produce.
It knows nothing about turbulence models.
"""
