from abc import ABC, abstractmethod


class ISecretDecryptor(ABC):
    """Turns a stored (encrypted) credential back into its plain value."""

    @abstractmethod
    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a secret. Raises ValueError if it cannot be decrypted."""
        pass
