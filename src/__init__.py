"""RepairShop Manager."""
