"""Kubeconfig registry, namespace cache and saved selection for kubenav."""
