DEFAULT_ENV = "dev"

# Naming convention components
SERVICE_NAME = "chatui"  # The application name
DOMAIN = "frontend"  # The domain being hosted
COMPONENT = "hosting"  # The functional component/subsystem

APP_NAME = "AmplifyNextJsChatUI"
APP_DESCRIPTION = "Server-rendered Next.js chat UI hosted on Amplify"
PLATFORM = "WEB_COMPUTE"  # enables server side rendering
AMPLIFY_SERVICE_PRINCIPAL = "amplify.amazonaws.com"

# Shared parameter store written by the auth and API stacks
PARAMETER_NAMESPACE = "/AgenticLLMAssistantWorkshop"
USER_POOL_ID_KEY = "cognito_user_pool_id"
USER_POOL_CLIENT_ID_KEY = "cognito_user_pool_client_id"
API_ENDPOINT_KEY = "agent_api"

# Environment variable names read by the hosted application
ENVIRONMENT_CONTRACT_VERSION = "1"
ENV_USER_POOL_ID = "AMPLIFY_USERPOOL_ID"
ENV_USER_POOL_CLIENT_ID = "COGNITO_USERPOOL_CLIENT_ID"
ENV_API_ENDPOINT = "API_ENDPOINT"
# Custom build image needed for Next.js 14 on Amplify
ENV_CUSTOM_IMAGE = "_CUSTOM_IMAGE"
CUSTOM_IMAGE = "amplify:al2023"

ENVIRONMENT_BINDINGS = {
    ENV_USER_POOL_ID: USER_POOL_ID_KEY,
    ENV_USER_POOL_CLIENT_ID: USER_POOL_CLIENT_ID_KEY,
    ENV_API_ENDPOINT: API_ENDPOINT_KEY,
}
ENVIRONMENT_LITERALS = {ENV_CUSTOM_IMAGE: CUSTOM_IMAGE}
SECRET_NAME_MARKERS = ("TOKEN", "SECRET", "PASSWORD", "PAT")
SECRET_REFERENCE_PREFIX = "{{resolve:secretsmanager:"

# Source repository
SOURCE_TOKEN_SECRET_NAME = "amplify/pat"
REPOSITORY_OWNER = "Masterpitan"
REPOSITORY_NAME = "llm-assistant-project"
GITHUB_URL = "https://github.com/{owner}/{repository}"

# Build specification
BUILD_SPEC_VERSION = "1.0"
CANDIDATE_WORKING_DIRECTORIES = ("frontend/chat-app", "chat-app")
SOURCE_ROOT = "."
INSTALL_COMMAND = "npm ci"
BUILD_COMMAND = "npm run build"
ARTIFACT_DIRECTORY = ".next"
ARTIFACT_FILES = ("**/*",)
CACHE_PATHS = ("node_modules/**/*",)

# Release topology
DEFAULT_BRANCH = "main"
DEFAULT_STAGE = "PRODUCTION"
PROMOTION_STAGE_TAG = "PromotionStage"

# Identity
IDENTITY_DECLARE_NEW = "declare-new"
IDENTITY_REFERENCE_EXISTING = "reference-existing"

SSM_READ_ACTIONS = ("ssm:GetParameter", "ssm:GetParameters", "ssm:GetParametersByPath")
SECRET_READ_ACTIONS = ("secretsmanager:GetSecretValue",)
LOG_DELIVERY_ACTIONS = (
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:DescribeLogGroups",
    "logs:PutLogEvents",
)
SSM_PARAMETER_ARN = "arn:{partition}:ssm:{region}:{account}:parameter{namespace}/"
# Secrets Manager appends "-" and six random characters to every secret ARN
SECRET_ARN = "arn:{partition}:secretsmanager:{region}:{account}:secret:{secret_name}-"
SECRET_ARN_SUFFIX = "??????"
AMPLIFY_LOG_GROUP_ARN = "arn:{partition}:logs:{region}:{account}:log-group:/aws/amplify/"

