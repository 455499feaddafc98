from __future__ import annotations

import pytest

from domain.models import Size, TerraformResource
from domain.resource_catalog import (
    classify_resource,
    extract_display_name,
    zone_base_size,
    zone_style,
)


@pytest.mark.parametrize(
    ("terraform_type", "semantic_type", "level"),
    [
        ("aws_vpc", "vpc", 1),
        ("aws_subnet", "subnet", 2),
        ("aws_security_group", "security_group", 2),
        ("aws_eks_cluster", "cluster", 3),
        ("azurerm_resource_group", "datacenter", 1),
        ("azurerm_virtual_network", "vpc", 1),
        ("google_compute_subnetwork", "subnet", 2),
        ("google_compute_firewall", "security_group", 2),
        ("google_container_cluster", "cluster", 3),
    ],
)
def test_zone_types_are_classified_with_hierarchy(
    terraform_type: str, semantic_type: str, level: int
) -> None:
    resource_class = classify_resource(terraform_type)

    assert resource_class.is_zone
    assert resource_class.semantic_type == semantic_type
    assert resource_class.hierarchy_level == level


@pytest.mark.parametrize(
    ("terraform_type", "semantic_type"),
    [
        ("aws_instance", "server"),
        ("aws_db_instance", "database"),
        ("aws_s3_bucket", "storage"),
        ("kubernetes_deployment", "container"),
        ("helm_release", "container"),
        ("aws_something_new", "server"),
    ],
)
def test_components_default_to_level_four(terraform_type: str, semantic_type: str) -> None:
    resource_class = classify_resource(terraform_type)

    assert not resource_class.is_zone
    assert resource_class.semantic_type == semantic_type
    assert resource_class.hierarchy_level == 4


@pytest.mark.parametrize(
    "terraform_type",
    [
        "aws_vpc",
        "aws_subnet",
        "aws_security_group",
        "aws_ecs_cluster",
        "aws_eks_cluster",
        "azurerm_virtual_network",
        "google_compute_firewall",
    ],
)
def test_zone_types_sit_above_components(terraform_type: str) -> None:
    resource_class = classify_resource(terraform_type)

    assert resource_class.is_zone
    assert 1 <= resource_class.hierarchy_level <= 3


def test_zone_base_sizes() -> None:
    assert zone_base_size("vpc") == Size(500, 500)
    assert zone_base_size("subnet") == Size(350, 300)
    assert zone_base_size("security_group") == Size(300, 200)
    assert zone_base_size("cluster") == Size(400, 350)
    assert zone_base_size("unknown") == Size(400, 300)
    assert zone_style("vpc").border_color == "#3b82f6"


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        ({"tags": {"Name": "edge-vpc"}, "name": "ignored"}, "edge-vpc"),
        ({"tags": {"name": "lower"}}, "lower"),
        ({"name": "web-sg"}, "web-sg"),
        ({"identifier": "orders-db"}, "orders-db"),
        ({"bucket": "assets"}, "assets"),
        ({}, "Public Web"),
    ],
)
def test_extract_display_name(config: dict[str, object], expected: str) -> None:
    resource = TerraformResource(type="aws_instance", name="public_web", config=config)

    assert extract_display_name(resource) == expected
