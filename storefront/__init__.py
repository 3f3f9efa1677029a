"""Reading cart and product listing wizard for the marketplace console."""
