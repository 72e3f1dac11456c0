"""Services for Changerawr."""
