"""HTTP API: response envelope helpers and versioned routers."""
