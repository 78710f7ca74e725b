"""Constants for the Triton Load Balancer Operator."""

# Watched resource
SERVICE_API_VERSION = "v1"
SERVICE_PLURAL = "services"
KIND_SERVICE = "Service"
SERVICE_TYPE_LOAD_BALANCER = "LoadBalancer"

CONTROLLER_NAME = "triton-loadbalancer-controller"

# Finalizers
FINALIZER = "loadbalancer.triton.io/finalizer"

# Annotations read from the Service
ANNOTATION_PREFIX = "cloud.tritoncompute/"
ANNOTATION_MAX_RS = f"{ANNOTATION_PREFIX}max_rs"
ANNOTATION_CERTIFICATE_NAME = f"{ANNOTATION_PREFIX}certificate_name"
ANNOTATION_METRICS_ACL = f"{ANNOTATION_PREFIX}metrics_acl"

# Instance metadata keys
METADATA_PREFIX = "cloud.tritoncompute:"
METADATA_LOADBALANCER = f"{METADATA_PREFIX}loadbalancer"
METADATA_PORTMAP = f"{METADATA_PREFIX}portmap"
METADATA_MAX_RS = f"{METADATA_PREFIX}max_rs"
METADATA_CERTIFICATE_NAME = f"{METADATA_PREFIX}certificate_name"
METADATA_METRICS_ACL = f"{METADATA_PREFIX}metrics_acl"

# Instance tags
TAG_SERVICE = "k8s-service"
TAG_MANAGED_BY = "managed-by"
TAG_LOADBALANCER = "loadbalancer"
OWNERSHIP_TAGS = {
    TAG_LOADBALANCER: "true",
    TAG_MANAGED_BY: CONTROLLER_NAME,
}

# Port types
PORT_TYPE_HTTP = "http"
PORT_TYPE_HTTPS = "https"
PORT_TYPE_TCP = "tcp"

# Instance states
STATE_RUNNING = "running"
STATE_FAILED = "failed"

# Address prefixes treated as private when choosing the ingress IP
PRIVATE_ADDRESS_PREFIXES = ("10.", "192.168.", "172.")

# Requeue delay for transient failures, in seconds
TRANSIENT_REQUEUE_DELAY = 30

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_RECONCILE_REQUEUED = "ReconcileRequeued"
EVENT_REASON_LOADBALANCER_CREATED = "LoadBalancerCreated"
EVENT_REASON_LOADBALANCER_UPDATED = "LoadBalancerUpdated"
EVENT_REASON_LOADBALANCER_DELETED = "LoadBalancerDeleted"
EVENT_REASON_INGRESS_UPDATED = "IngressUpdated"
