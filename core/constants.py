"""Common constants shared across armsynth modules."""

AZURE_STACK_METADATA = "azure:arm:stack"
STACK_METADATA_TYPES = frozenset({AZURE_STACK_METADATA, "aws:cdk:stack"})
AUTO_ENABLED_IDENTITY_METADATA = "AutoEnabledIdentity"

DEFAULT_OUTDIR = "arm.out"
CONTENT_VERSION = "1.0.0.0"
MANIFEST_FILE = "manifest.json"
MANIFEST_VERSION = "1.0.0"

# ARM template service limits.
MAX_TEMPLATE_RESOURCES = 800
MAX_TEMPLATE_OUTPUTS = 64
MAX_TEMPLATE_BYTES = 4 * 1024 * 1024
TEMPLATE_SIZE_WARNING_BYTES = int(3.5 * 1024 * 1024)

SUBSCRIPTION_SCOPED_TYPES = frozenset(
    {
        "Microsoft.Resources/resourceGroups",
        "Microsoft.Authorization/policyDefinitions",
        "Microsoft.Authorization/policyAssignments",
        "Microsoft.Management/managementGroups",
    }
)
