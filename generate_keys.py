import secrets

print("Copy this key to your .env file:")
print(f"JWT_SECRET={secrets.token_urlsafe(32)}")
