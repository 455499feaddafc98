from __future__ import annotations

import re
from dataclasses import dataclass

from domain.models import ResourceClass, Size, TerraformResource

COMPONENT_HIERARCHY_LEVEL = 4
DEFAULT_COMPONENT_TYPE = "server"


@dataclass(frozen=True)
class ZoneStyle:
    base_size: Size
    background_color: str
    border_color: str


_ZONE_TYPE_BY_TERRAFORM: dict[str, str] = {
    # AWS
    "aws_vpc": "vpc",
    "aws_subnet": "subnet",
    "aws_security_group": "security_group",
    "aws_ecs_cluster": "cluster",
    "aws_eks_cluster": "cluster",
    # Azure
    "azurerm_virtual_network": "vpc",
    "azurerm_subnet": "subnet",
    "azurerm_network_security_group": "security_group",
    "azurerm_resource_group": "datacenter",
    "azurerm_kubernetes_cluster": "cluster",
    # GCP
    "google_compute_network": "vpc",
    "google_compute_subnetwork": "subnet",
    "google_compute_firewall": "security_group",
    "google_container_cluster": "cluster",
}

_HIERARCHY_LEVEL_BY_TERRAFORM: dict[str, int] = {
    "aws_vpc": 1,
    "azurerm_resource_group": 1,
    "azurerm_virtual_network": 1,
    "google_compute_network": 1,
    "aws_subnet": 2,
    "azurerm_subnet": 2,
    "google_compute_subnetwork": 2,
    "aws_security_group": 2,
    "azurerm_network_security_group": 2,
    "google_compute_firewall": 2,
    "aws_ecs_cluster": 3,
    "aws_eks_cluster": 3,
    "azurerm_kubernetes_cluster": 3,
    "google_container_cluster": 3,
}

_COMPONENT_TYPE_BY_TERRAFORM: dict[str, str] = {
    # AWS compute
    "aws_instance": "server",
    "aws_launch_template": "server",
    "aws_launch_configuration": "server",
    "aws_autoscaling_group": "server",
    "aws_spot_instance_request": "server",
    # AWS containers and serverless
    "aws_ecs_service": "container",
    "aws_ecs_task_definition": "container",
    "aws_eks_node_group": "container",
    "aws_lambda_function": "cloud",
    "aws_lambda_layer_version": "cloud",
    # AWS databases
    "aws_rds_instance": "database",
    "aws_rds_cluster": "database",
    "aws_db_instance": "database",
    "aws_db_cluster": "database",
    "aws_dynamodb_table": "database",
    "aws_elasticache_cluster": "database",
    "aws_redshift_cluster": "database",
    "aws_documentdb_cluster": "database",
    "aws_neptune_cluster": "database",
    # AWS storage
    "aws_s3_bucket": "storage",
    "aws_efs_file_system": "storage",
    "aws_fsx_file_system": "storage",
    "aws_ebs_volume": "storage",
    "aws_ebs_snapshot": "storage",
    # AWS networking
    "aws_load_balancer": "network",
    "aws_lb": "network",
    "aws_elb": "network",
    "aws_alb": "network",
    "aws_nlb": "network",
    "aws_lb_target_group": "network",
    "aws_lb_listener": "network",
    "aws_lb_target_group_attachment": "network",
    "aws_internet_gateway": "network",
    "aws_nat_gateway": "network",
    "aws_vpn_gateway": "network",
    "aws_route_table": "network",
    "aws_route": "network",
    "aws_route_table_association": "network",
    "aws_db_subnet_group": "network",
    "aws_eip": "network",
    "aws_network_interface": "network",
    "aws_cloudfront_distribution": "network",
    "aws_api_gateway": "network",
    "aws_api_gateway_v2_api": "network",
    # AWS monitoring
    "aws_cloudwatch_dashboard": "monitoring",
    "aws_cloudwatch_alarm": "monitoring",
    "aws_cloudwatch_log_group": "monitoring",
    "aws_sns_topic": "monitoring",
    "aws_sqs_queue": "monitoring",
    # AWS security
    "aws_iam_role": "security",
    "aws_iam_policy": "security",
    "aws_iam_user": "security",
    "aws_iam_group": "security",
    "aws_kms_key": "security",
    "aws_secretsmanager_secret": "security",
    # Azure compute
    "azurerm_virtual_machine": "server",
    "azurerm_linux_virtual_machine": "server",
    "azurerm_windows_virtual_machine": "server",
    "azurerm_virtual_machine_scale_set": "server",
    "azurerm_container_instance": "container",
    "azurerm_container_group": "container",
    "azurerm_kubernetes_cluster_node_pool": "container",
    # Azure serverless
    "azurerm_function_app": "cloud",
    "azurerm_logic_app_workflow": "cloud",
    "azurerm_app_service": "cloud",
    # Azure databases
    "azurerm_sql_database": "database",
    "azurerm_sql_server": "database",
    "azurerm_mysql_server": "database",
    "azurerm_mysql_flexible_server": "database",
    "azurerm_postgresql_server": "database",
    "azurerm_postgresql_flexible_server": "database",
    "azurerm_cosmosdb_account": "database",
    "azurerm_redis_cache": "database",
    # Azure storage
    "azurerm_storage_account": "storage",
    "azurerm_storage_blob": "storage",
    "azurerm_managed_disk": "storage",
    "azurerm_disk_encryption_set": "storage",
    # Azure networking
    "azurerm_lb": "network",
    "azurerm_application_gateway": "network",
    "azurerm_public_ip": "network",
    "azurerm_network_interface": "network",
    "azurerm_route_table": "network",
    "azurerm_nat_gateway": "network",
    "azurerm_vpn_gateway": "network",
    "azurerm_express_route_circuit": "network",
    # Azure monitoring
    "azurerm_monitor_diagnostic_setting": "monitoring",
    "azurerm_log_analytics_workspace": "monitoring",
    "azurerm_application_insights": "monitoring",
    # Azure security
    "azurerm_key_vault": "security",
    "azurerm_key_vault_secret": "security",
    "azurerm_user_assigned_identity": "security",
    "azurerm_role_assignment": "security",
    # GCP compute
    "google_compute_instance": "server",
    "google_compute_instance_template": "server",
    "google_compute_instance_group": "server",
    "google_compute_autoscaler": "server",
    # GCP containers and serverless
    "google_cloud_run_service": "container",
    "google_cloudfunctions_function": "cloud",
    "google_cloudfunctions2_function": "cloud",
    "google_app_engine_application": "cloud",
    # GCP databases
    "google_sql_database_instance": "database",
    "google_sql_database": "database",
    "google_bigtable_instance": "database",
    "google_firestore_database": "database",
    "google_spanner_instance": "database",
    "google_redis_instance": "database",
    # GCP storage
    "google_storage_bucket": "storage",
    "google_compute_disk": "storage",
    "google_filestore_instance": "storage",
    # GCP networking
    "google_compute_global_address": "network",
    "google_compute_address": "network",
    "google_compute_forwarding_rule": "network",
    "google_compute_global_forwarding_rule": "network",
    "google_compute_backend_service": "network",
    "google_compute_url_map": "network",
    "google_compute_target_proxy": "network",
    "google_compute_router": "network",
    "google_compute_vpn_gateway": "network",
    # GCP monitoring
    "google_monitoring_dashboard": "monitoring",
    "google_logging_sink": "monitoring",
    "google_pubsub_topic": "monitoring",
    "google_pubsub_subscription": "monitoring",
    # GCP security
    "google_service_account": "security",
    "google_service_account_key": "security",
    "google_project_iam_binding": "security",
    "google_kms_crypto_key": "security",
    # Kubernetes and Helm
    "kubernetes_deployment": "container",
    "kubernetes_service": "container",
    "kubernetes_ingress": "network",
    "kubernetes_configmap": "container",
    "kubernetes_secret": "security",
    "helm_release": "container",
}

_DEFAULT_ZONE_STYLE = ZoneStyle(Size(400, 300), "rgba(156, 163, 175, 0.1)", "#9ca3af")

_ZONE_STYLE_BY_TYPE: dict[str, ZoneStyle] = {
    "vpc": ZoneStyle(Size(500, 500), "rgba(59, 130, 246, 0.1)", "#3b82f6"),
    "subnet": ZoneStyle(Size(350, 300), "rgba(34, 197, 94, 0.1)", "#22c55e"),
    "security_group": ZoneStyle(Size(300, 200), "rgba(239, 68, 68, 0.1)", "#ef4444"),
    "cluster": ZoneStyle(Size(400, 350), "rgba(168, 85, 247, 0.1)", "#a855f7"),
    "datacenter": ZoneStyle(Size(400, 300), "rgba(107, 114, 128, 0.1)", "#6b7280"),
}

# Resources that only link other resources together; they never become nodes.
GLUE_RESOURCE_TYPES: frozenset[str] = frozenset(
    {
        "aws_lb_target_group_attachment",
        "aws_route_table_association",
        "aws_route",
    }
)

_WORD_START = re.compile(r"\b\w")


def classify_resource(terraform_type: str) -> ResourceClass:
    zone_type = _ZONE_TYPE_BY_TERRAFORM.get(terraform_type)
    level = _HIERARCHY_LEVEL_BY_TERRAFORM.get(terraform_type, COMPONENT_HIERARCHY_LEVEL)
    if zone_type is not None:
        return ResourceClass(semantic_type=zone_type, is_zone=True, hierarchy_level=level)
    return ResourceClass(
        semantic_type=_COMPONENT_TYPE_BY_TERRAFORM.get(terraform_type, DEFAULT_COMPONENT_TYPE),
        is_zone=False,
        hierarchy_level=level,
    )


def zone_style(semantic_type: str) -> ZoneStyle:
    return _ZONE_STYLE_BY_TYPE.get(semantic_type, _DEFAULT_ZONE_STYLE)


def zone_base_size(semantic_type: str) -> Size:
    return zone_style(semantic_type).base_size


def extract_display_name(resource: TerraformResource) -> str:
    config = resource.config
    tags = config.get("tags")
    if isinstance(tags, dict):
        tag_name = tags.get("Name") or tags.get("name")
        if tag_name:
            return str(tag_name)
    for key in ("name", "identifier", "bucket"):
        value = config.get(key)
        if value:
            return str(value)
    return _WORD_START.sub(lambda match: match.group(0).upper(), resource.name.replace("_", " "))
