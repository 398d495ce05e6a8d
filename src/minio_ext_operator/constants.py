"""Constants for the MinIO Ext Operator."""

# API Group
API_GROUP = "minio.k8s.reddec.net"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_BUCKET = "Bucket"
KIND_POLICY = "Policy"
KIND_USER = "User"

# Resource Plurals
PLURAL_BUCKETS = "buckets"
PLURAL_POLICIES = "policies"
PLURAL_USERS = "users"

# Finalizers
FINALIZER_BUCKET = "reddec.net.k8s.minio-bucket-finalizer"
FINALIZER_POLICY = "reddec.net.k8s.minio-policy-finalizer"
FINALIZER_USER = "reddec.net.k8s.minio-user-finalizer"

# Field Manager
FIELD_MANAGER = "minio-ext-operator"
CONTROLLER_NAME = "minio-ext-operator"

# Credential secret
SECRET_SUFFIX = "-credentials"
SECRET_ACCESS_KEY_FIELD = "AWS_ACCESS_KEY_ID"
SECRET_SECRET_KEY_FIELD = "AWS_SECRET_ACCESS_KEY"
DEFAULT_CREDENTIAL_BYTES = 32

# Requeue intervals (seconds)
DEFAULT_REQUEUE_INTERVAL = 60.0
USER_NOT_FOUND_RETRY_INTERVAL = 10.0

# Policy documents
POLICY_VERSION = "2012-10-17"
BUCKET_ARN_PREFIX = "arn:aws:s3:::"
WILDCARD_PRINCIPAL = "*"
ACTION_GET_OBJECT = "s3:GetObject"
ACTION_PUT_OBJECT = "s3:PutObject"
ACTION_ALL = "s3:*"
READ_ACTIONS = (
    "s3:GetBucketLocation",
    "s3:GetObject",
    "s3:ListBucket",
    "s3:ListenBucketNotification",
    "s3:ListenNotification",
)

# Storage service error codes
ERR_NO_SUCH_BUCKET = "NoSuchBucket"
ERR_NO_SUCH_POLICY = "XMinioAdminNoSuchPolicy"
ERR_NO_SUCH_USER = "XMinioAdminNoSuchUser"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_BUCKET_CREATED = "BucketCreated"
EVENT_REASON_BUCKET_DELETED = "BucketDeleted"
EVENT_REASON_POLICY_APPLIED = "PolicyApplied"
EVENT_REASON_POLICY_ATTACHED = "PolicyAttached"
EVENT_REASON_POLICY_DELETED = "PolicyDeleted"
EVENT_REASON_USER_CREATED = "UserCreated"
EVENT_REASON_USER_DELETED = "UserDeleted"
EVENT_REASON_SECRET_CREATED = "SecretCreated"
