"""Chat notifications shared by the cloud operations lambdas."""
