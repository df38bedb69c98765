import os
import boto3
from botocore.client import Config
from threading import Lock
#configures the AWS clients (S3 for photos, Cognito for identity) to use globally + singleton pattern
class AWSConfig:
    AWS_ACCESS_KEY_ID = os.getenv('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.getenv('AWS_SECRET_ACCESS_KEY')
    AWS_REGION = os.getenv('AWS_REGION', 'us-east-1')
    S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME')
    COGNITO_USER_POOL_ID = os.getenv('COGNITO_USER_POOL_ID')
    COGNITO_CLIENT_ID = os.getenv('COGNITO_CLIENT_ID')

    #one client per service name
    _instances = {}
    #only one thread at a time may create a client
    _lock = Lock()

    @classmethod
    def _get_client(cls, service_name, **extra):
        if service_name not in cls._instances:
            with cls._lock:
                if service_name not in cls._instances:
                    cls._instances[service_name] = boto3.client(
                                    service_name,
                                    aws_access_key_id=cls.AWS_ACCESS_KEY_ID,
                                    aws_secret_access_key=cls.AWS_SECRET_ACCESS_KEY,
                                    region_name=cls.AWS_REGION,
                                    **extra
                                    )
        return cls._instances[service_name]

    @classmethod
    def get_s3_client(cls):
        return cls._get_client('s3', config=Config(signature_version='s3v4'))

    @classmethod
    def get_cognito_client(cls):
        return cls._get_client('cognito-idp')
