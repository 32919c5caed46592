TEST_BUCKET_NAME = "test-files"
TEST_REGION = "us-east-1"
