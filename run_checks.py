from fastapi.testclient import TestClient

from civicwatch.core.settings import Settings
from civicwatch.main import create_app

app = create_app(Settings(USE_MOCK_DB=True, ESCALATION_SCHEDULER_ENABLED=False, AI_ENABLED=False))

with TestClient(app) as client:
    print('ROOT:')
    print(client.get('/').json())

    print('\nHEALTH:')
    print(client.get('/health').json())

    print('\nDB HEALTH:')
    resp = client.get('/health/db')
    print(resp.status_code, resp.json())

    print('\nINSIGHTS:')
    print(client.get('/analytics/insights').json())

    print('\nESCALATION SWEEP:')
    print(client.post('/escalations/sweep').json())
