"""CloudFormation template for the director's network stack.

One internal subnet is emitted per availability zone.  The load balancer
is only included when a certificate ARN is supplied.

Resources::

    VPC + InternetGateway + public route table
    BOSHSubnet (10.0.0.0/24)          director + NAT-free public subnet
    InternalSubnet<N> (10.0.N*16.0/20) one per availability zone
    BOSHSecurityGroup / InternalSecurityGroup
    BOSHEIP                           director's public address
    BOSHUser + BOSHUserAccessKey      credentials handed to the AWS CPI
    LoadBalancer (optional)           HTTPS listener using an IAM certificate

Outputs consumed by :mod:`bbl.commands.up` / :mod:`bbl.commands.destroy`:
``VPCID``, ``BOSHSubnet``, ``BOSHSubnetAZ``, ``BOSHEIP``,
``BOSHUserAccessKey``, ``BOSHUserSecretAccessKey``, ``BOSHSecurityGroup``,
``InternalSecurityGroup``, ``InternalSubnet<N>Name`` / ``AZ`` / ``CIDR``,
and ``LoadBalancer`` / ``LoadBalancerURL`` when applicable.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

VPC_CIDR = "10.0.0.0/16"
BOSH_SUBNET_CIDR = "10.0.0.0/24"

#: Ports the operator needs on the director: ssh, bosh-init agent, director API.
BOSH_INGRESS_PORTS = (22, 6868, 25555)

TEMPLATE_VERSION = "2010-09-09"


def _ref(name: str) -> Dict[str, str]:
    return {"Ref": name}


def _tcp_ingress(port: int, cidr: str = "0.0.0.0/0") -> Dict[str, Any]:
    return {"IpProtocol": "tcp", "FromPort": port, "ToPort": port, "CidrIp": cidr}


def internal_subnet_cidr(index: int) -> str:
    """CIDR of the *index*-th (0-based) internal subnet."""
    return f"10.0.{16 * (index + 1)}.0/20"


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------


def _network(resources: Dict[str, Any], outputs: Dict[str, Any]) -> None:
    resources["VPC"] = {
        "Type": "AWS::EC2::VPC",
        "Properties": {
            "CidrBlock": VPC_CIDR,
            "EnableDnsHostnames": True,
            "Tags": [{"Key": "Name", "Value": {"Ref": "AWS::StackName"}}],
        },
    }
    resources["VPCGatewayInternetGateway"] = {"Type": "AWS::EC2::InternetGateway"}
    resources["VPCGatewayAttachment"] = {
        "Type": "AWS::EC2::VPCGatewayAttachment",
        "Properties": {
            "VpcId": _ref("VPC"),
            "InternetGatewayId": _ref("VPCGatewayInternetGateway"),
        },
    }
    resources["PublicRouteTable"] = {
        "Type": "AWS::EC2::RouteTable",
        "Properties": {"VpcId": _ref("VPC")},
    }
    resources["PublicRoute"] = {
        "Type": "AWS::EC2::Route",
        "DependsOn": "VPCGatewayAttachment",
        "Properties": {
            "RouteTableId": _ref("PublicRouteTable"),
            "DestinationCidrBlock": "0.0.0.0/0",
            "GatewayId": _ref("VPCGatewayInternetGateway"),
        },
    }
    outputs["VPCID"] = {"Value": _ref("VPC")}


def _bosh_subnet(resources: Dict[str, Any], outputs: Dict[str, Any], az: str) -> None:
    resources["BOSHSubnet"] = {
        "Type": "AWS::EC2::Subnet",
        "Properties": {
            "VpcId": _ref("VPC"),
            "CidrBlock": BOSH_SUBNET_CIDR,
            "AvailabilityZone": az,
            "Tags": [{"Key": "Name", "Value": "BOSH"}],
        },
    }
    resources["BOSHRouteTableAssociation"] = {
        "Type": "AWS::EC2::SubnetRouteTableAssociation",
        "Properties": {
            "RouteTableId": _ref("PublicRouteTable"),
            "SubnetId": _ref("BOSHSubnet"),
        },
    }
    outputs["BOSHSubnet"] = {"Value": _ref("BOSHSubnet")}
    outputs["BOSHSubnetAZ"] = {"Value": az}
    outputs["BOSHSubnetCIDR"] = {"Value": BOSH_SUBNET_CIDR}


def _internal_subnets(
    resources: Dict[str, Any], outputs: Dict[str, Any], azs: List[str],
) -> None:
    for index, az in enumerate(azs):
        name = f"InternalSubnet{index + 1}"
        cidr = internal_subnet_cidr(index)
        resources[name] = {
            "Type": "AWS::EC2::Subnet",
            "Properties": {
                "VpcId": _ref("VPC"),
                "CidrBlock": cidr,
                "AvailabilityZone": az,
                "Tags": [{"Key": "Name", "Value": name}],
            },
        }
        resources[f"{name}RouteTableAssociation"] = {
            "Type": "AWS::EC2::SubnetRouteTableAssociation",
            "Properties": {
                "RouteTableId": _ref("PublicRouteTable"),
                "SubnetId": _ref(name),
            },
        }
        outputs[f"{name}Name"] = {"Value": _ref(name)}
        outputs[f"{name}AZ"] = {"Value": az}
        outputs[f"{name}CIDR"] = {"Value": cidr}


def _security_groups(resources: Dict[str, Any], outputs: Dict[str, Any]) -> None:
    resources["InternalSecurityGroup"] = {
        "Type": "AWS::EC2::SecurityGroup",
        "Properties": {
            "VpcId": _ref("VPC"),
            "GroupDescription": "Internal",
            "SecurityGroupIngress": [
                {"IpProtocol": "-1", "CidrIp": VPC_CIDR},
            ],
        },
    }
    resources["BOSHSecurityGroup"] = {
        "Type": "AWS::EC2::SecurityGroup",
        "Properties": {
            "VpcId": _ref("VPC"),
            "GroupDescription": "BOSH",
            "SecurityGroupIngress": [
                _tcp_ingress(port) for port in BOSH_INGRESS_PORTS
            ] + [
                {
                    "IpProtocol": "-1",
                    "SourceSecurityGroupId": _ref("InternalSecurityGroup"),
                },
            ],
        },
    }
    outputs["BOSHSecurityGroup"] = {"Value": _ref("BOSHSecurityGroup")}
    outputs["InternalSecurityGroup"] = {"Value": _ref("InternalSecurityGroup")}


def _director_identity(resources: Dict[str, Any], outputs: Dict[str, Any]) -> None:
    resources["BOSHEIP"] = {
        "Type": "AWS::EC2::EIP",
        "DependsOn": "VPCGatewayAttachment",
        "Properties": {"Domain": "vpc"},
    }
    resources["BOSHUser"] = {
        "Type": "AWS::IAM::User",
        "Properties": {
            "Policies": [
                {
                    "PolicyName": "aws-cpi",
                    "PolicyDocument": {
                        "Version": "2012-10-17",
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Action": [
                                    "ec2:*",
                                    "elasticloadbalancing:*",
                                    "iam:PassRole",
                                ],
                                "Resource": "*",
                            }
                        ],
                    },
                }
            ],
        },
    }
    resources["BOSHUserAccessKey"] = {
        "Type": "AWS::IAM::AccessKey",
        "Properties": {"UserName": _ref("BOSHUser")},
    }
    outputs["BOSHEIP"] = {"Value": _ref("BOSHEIP")}
    outputs["BOSHUserAccessKey"] = {"Value": _ref("BOSHUserAccessKey")}
    outputs["BOSHUserSecretAccessKey"] = {
        "Value": {"Fn::GetAtt": ["BOSHUserAccessKey", "SecretAccessKey"]},
    }


def _load_balancer(
    resources: Dict[str, Any], outputs: Dict[str, Any], certificate_arn: str,
) -> None:
    resources["LoadBalancerSecurityGroup"] = {
        "Type": "AWS::EC2::SecurityGroup",
        "Properties": {
            "VpcId": _ref("VPC"),
            "GroupDescription": "LoadBalancer",
            "SecurityGroupIngress": [_tcp_ingress(80), _tcp_ingress(443)],
        },
    }
    resources["LoadBalancer"] = {
        "Type": "AWS::ElasticLoadBalancing::LoadBalancer",
        "DependsOn": "VPCGatewayAttachment",
        "Properties": {
            "Subnets": [_ref("BOSHSubnet")],
            "SecurityGroups": [_ref("LoadBalancerSecurityGroup")],
            "HealthCheck": {
                "Target": "TCP:8080",
                "Interval": "30",
                "Timeout": "5",
                "HealthyThreshold": "10",
                "UnhealthyThreshold": "2",
            },
            "Listeners": [
                {
                    "Protocol": "tcp",
                    "LoadBalancerPort": "80",
                    "InstanceProtocol": "tcp",
                    "InstancePort": "8080",
                },
                {
                    "Protocol": "ssl",
                    "LoadBalancerPort": "443",
                    "InstanceProtocol": "tcp",
                    "InstancePort": "8080",
                    "SSLCertificateId": certificate_arn,
                },
            ],
        },
    }
    outputs["LoadBalancer"] = {"Value": _ref("LoadBalancer")}
    outputs["LoadBalancerURL"] = {
        "Value": {"Fn::GetAtt": ["LoadBalancer", "DNSName"]},
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_template(
    key_pair_name: str,
    availability_zones: List[str],
    *,
    certificate_arn: str = "",
) -> Dict[str, Any]:
    """Return the stack template as a dict.

    The director subnet lives in the first availability zone; one internal
    subnet is created per zone.
    """
    if not availability_zones:
        raise ValueError("at least one availability zone is required")

    resources: Dict[str, Any] = {}
    outputs: Dict[str, Any] = {}

    _network(resources, outputs)
    _bosh_subnet(resources, outputs, availability_zones[0])
    _internal_subnets(resources, outputs, availability_zones)
    _security_groups(resources, outputs)
    _director_identity(resources, outputs)
    if certificate_arn:
        _load_balancer(resources, outputs, certificate_arn)

    return {
        "AWSTemplateFormatVersion": TEMPLATE_VERSION,
        "Description": f"Infrastructure for a BOSH director (key pair {key_pair_name})",
        "Resources": resources,
        "Outputs": outputs,
    }


def render_template(
    key_pair_name: str,
    availability_zones: List[str],
    *,
    certificate_arn: str = "",
) -> str:
    """JSON body for ``create_stack`` / ``update_stack``."""
    return json.dumps(
        build_template(
            key_pair_name, availability_zones, certificate_arn=certificate_arn,
        ),
        sort_keys=True,
    )
