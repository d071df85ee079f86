"""Multi-vendor marketplace: order fulfillment, delivery fees and logistics."""
