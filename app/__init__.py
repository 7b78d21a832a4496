"""Back office API for boxed inventory, orders and payments."""
