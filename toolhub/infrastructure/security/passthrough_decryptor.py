from toolhub.application.interfaces.i_secret_decryptor import ISecretDecryptor


class PassthroughSecretDecryptor(ISecretDecryptor):
    """Treats stored secrets as plain text.

    Deployments that encrypt credentials at rest plug in their own decryptor.
    """

    def decrypt(self, ciphertext: str) -> str:
        if ciphertext is None:
            raise ValueError("No secret to decrypt")
        return ciphertext
