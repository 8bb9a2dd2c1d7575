from faker import Faker
from faker.providers import BaseProvider


class CyberProvider(BaseProvider):
    """
    CyberScroll 专用数据生成器
    生成安全领域的文章标题、标签与访客昵称
    """

    # 标题前缀
    title_prefixes = [
        'Hunting', 'Mitigating', 'Detecting', 'Triaging', 'Hardening',
        'Auditing', 'Containing', 'Mapping', 'Reversing', 'Monitoring'
    ]

    # 安全主题
    topics = [
        'Ransomware Lateral Movement', 'Supply Chain Implants', 'Cloud IAM Drift',
        'Phishing Kits', 'Kerberoasting Attempts', 'Exposed S3 Buckets',
        'Living-off-the-Land Binaries', 'Third-Party SaaS Risk', 'Zero-Day Exploits',
        'Insider Threats', 'Credential Stuffing', 'Container Escapes'
    ]

    # 与默认分类同名的标签
    security_tags = [
        'ThreatIntel', 'VendorRisk', 'Detection', 'Compliance',
        'ZeroDay', 'IncidentResponse', 'CloudSec', 'PenTesting'
    ]

    handle_suffixes = ['Pro', 'Analyst', 'Hunter', 'Ops', 'Sec', 'Red', 'Blue']

    def security_title(self):
        """生成文章标题"""
        return f"{self.random_element(self.title_prefixes)} {self.random_element(self.topics)}"

    def security_tags_sample(self, max_tags=3):
        return list(self.random_elements(self.security_tags, length=self.random_int(1, max_tags), unique=True))

    def security_handle(self):
        """生成访客昵称，如 CyberHunter"""
        prefix = self.generator.first_name()
        return f"{prefix}{self.random_element(self.handle_suffixes)}"

    def markdown_body(self, paragraphs=3):
        sections = [f"# {self.security_title()}"]
        for _ in range(paragraphs):
            sections.append(self.generator.paragraph(nb_sentences=5))
        return '\n\n'.join(sections)


# 初始化 Faker 并添加自定义 Provider
fake = Faker('en_US')
fake.add_provider(CyberProvider)
