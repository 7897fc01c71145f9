"""In-memory OFD archives shared by the test modules."""

import io
import zipfile

NS = 'xmlns:ofd="http://www.ofdspec.org/2016"'

ENTRY_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<ofd:OFD {NS} Version="1.0" DocType="OFD">
  <ofd:DocBody>
    <ofd:DocInfo>
      <ofd:DocID>6c1a2b</ofd:DocID>
      <ofd:Title>Invoice</ofd:Title>
      <ofd:Author>Finance</ofd:Author>
    </ofd:DocInfo>
    <ofd:DocRoot>Doc_0/Document.xml</ofd:DocRoot>
  </ofd:DocBody>
</ofd:OFD>"""

DOCUMENT_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<ofd:Document {NS}>
  <ofd:CommonData>
    <ofd:MaxUnitID>20</ofd:MaxUnitID>
    <ofd:PageArea><ofd:PhysicalBox>0 0 210 297</ofd:PhysicalBox></ofd:PageArea>
    <ofd:PublicRes>PublicRes.xml</ofd:PublicRes>
    <ofd:DocumentRes>DocumentRes.xml</ofd:DocumentRes>
  </ofd:CommonData>
  <ofd:Pages>
    <ofd:Page ID="1" BaseLoc="Pages/Page_0/Content.xml"/>
  </ofd:Pages>
</ofd:Document>"""

PUBLIC_RES_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<ofd:Res {NS} BaseLoc="Res">
  <ofd:Fonts>
    <ofd:Font ID="3" FontName="SimSun" FamilyName="SimSun"/>
    <ofd:Font ID="4" FontName="Courier New" Bold="true"/>
  </ofd:Fonts>
</ofd:Res>"""

DOCUMENT_RES_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<ofd:Res {NS} BaseLoc="Res">
  <ofd:MultiMedias>
    <ofd:MultiMedia ID="5" Type="Image" Format="PNG">
      <ofd:MediaFile>image_5.png</ofd:MediaFile>
    </ofd:MultiMedia>
    <ofd:MultiMedia ID="6" Type="Video">
      <ofd:MediaFile>clip.mp4</ofd:MediaFile>
    </ofd:MultiMedia>
  </ofd:MultiMedias>
</ofd:Res>"""

TEXT_PAGE_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<ofd:Page {NS}>
  <ofd:Content>
    <ofd:Layer ID="2">
      <ofd:TextObject ID="10" Boundary="10 10 100 20" Font="3" Size="5">
        <ofd:FillColor Value="255 0 0"/>
        <ofd:TextCode X="0" Y="0">Hello</ofd:TextCode>
      </ofd:TextObject>
    </ofd:Layer>
  </ofd:Content>
</ofd:Page>"""


def page_xml(body: str) -> str:
    """Wrap layer children into a page content document."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<ofd:Page {NS}>
  <ofd:Content>
    <ofd:Layer ID="2">{body}</ofd:Layer>
  </ofd:Content>
</ofd:Page>"""


def default_parts(page: str = TEXT_PAGE_XML) -> dict:
    return {
        "OFD.xml": ENTRY_XML,
        "Doc_0/Document.xml": DOCUMENT_XML,
        "Doc_0/PublicRes.xml": PUBLIC_RES_XML,
        "Doc_0/DocumentRes.xml": DOCUMENT_RES_XML,
        "Doc_0/Pages/Page_0/Content.xml": page,
    }


def build_ofd(parts: dict) -> bytes:
    """Zip ``parts`` (name -> str or bytes) into an OFD archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in parts.items():
            archive.writestr(name, content.encode("utf-8") if isinstance(content, str) else content)
    return buffer.getvalue()


def png_bytes(size=(4, 4), color="red") -> bytes:
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()
