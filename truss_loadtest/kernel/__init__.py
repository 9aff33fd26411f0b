# truss_loadtest/kernel - DOF numbering, assembly and the linear solver
"""
KERNEL: THE LINEAR-ALGEBRA CORE
===============================

Assembly and solving do not care what a member is made of. They need:
- A map (joint_index, axis) → DOF index, with restrained DOFs left out
- Element stiffness matrices in global coordinates
- Load vectors

Member geometry and ratings live outside the kernel (elements.py, checks/).
"""

from .dof import DOFManager, DOF_PER_JOINT
from .solve import Factorization, MechanismError, factorize, solve_linear

__all__ = ['DOFManager', 'DOF_PER_JOINT', 'Factorization', 'MechanismError', 'factorize', 'solve_linear']
