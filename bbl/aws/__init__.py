"""AWS service interactions (CloudFormation, EC2, IAM)."""

from bbl.aws.cloudformation import InfrastructureManager, Stack, StackManager
from bbl.aws.context import AWSContext, ClientProvider
from bbl.aws.ec2 import AvailabilityZoneRetriever, KeyPairManager, VPCStatusChecker
from bbl.aws.iam import Certificate, CertificateDescriber

__all__ = [
    "AWSContext",
    "AvailabilityZoneRetriever",
    "Certificate",
    "CertificateDescriber",
    "ClientProvider",
    "InfrastructureManager",
    "KeyPairManager",
    "Stack",
    "StackManager",
    "VPCStatusChecker",
]
