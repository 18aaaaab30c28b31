"""HTTP plumbing shared by all routers."""
