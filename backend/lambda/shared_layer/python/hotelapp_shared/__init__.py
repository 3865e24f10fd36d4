"""hotelapp_shared: Shared utilities for the hotel app Lambda functions.

Provides:
    - Bearer token claims extraction (Cognito ID tokens)
    - Runtime configuration struct
    - S3 / DynamoDB client singletons
    - HTTP response helpers with CORS
    - multipart/form-data parsing
    - Hotel record model and DynamoDB serialization
"""

__version__ = "1.0.0"
