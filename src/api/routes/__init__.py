"""Route modules of the ClusterRec API."""
