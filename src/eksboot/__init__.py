"""EKS cluster bootstrap helpers (eksboot).

Reconcile SSH key pairs against EC2 and assemble authenticated kubeconfigs for
freshly created EKS control planes.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
