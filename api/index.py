from mangum import Mangum

# Reuse the full backend app so serverless and local deployments expose the same routes
from backend.app import app

# Vercel handler
handler = Mangum(app)
