"""GL07 gateway - ABWTransaction XML to Unit4 transaction batches."""
